"""
Application summary MCP server.

Aggregates a deployed application's state, instances, routes and stack from
the platform control-plane API.
"""

from appsummary.models import ApplicationSummary
from appsummary.summary import ApplicationSummaryResult, SummaryActor

__all__ = ["ApplicationSummary", "ApplicationSummaryResult", "SummaryActor"]
