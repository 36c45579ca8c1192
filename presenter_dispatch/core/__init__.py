"""Core building blocks: errors, logging and collaborator protocols."""
