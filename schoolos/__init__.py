"""
School OS — Authorization Core
=================================
Every mutation passes through the Command Bus.
Every successful command leaves an Audit Event.
Every policy change is a new version, never an overwrite.
"""
