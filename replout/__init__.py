"""Display trees for values produced in an interactive Python session."""
