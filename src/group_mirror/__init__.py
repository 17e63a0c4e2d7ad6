"""Mirror GitLab groups and GitHub organizations to local disk."""

__version__ = "1.0.0"
