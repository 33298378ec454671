"""Pulumi program for the team's GitHub repositories."""

from ghmanagement.program import run

run()
