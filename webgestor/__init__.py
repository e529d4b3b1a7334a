"""WebGestor: teams, projects and tasks with notifications and an activity feed."""
