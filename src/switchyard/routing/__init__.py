"""Routing — path patterns, the method-indexed router, and the route builder."""
