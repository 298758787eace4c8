"""Agent-side capabilities and the placement planner."""
