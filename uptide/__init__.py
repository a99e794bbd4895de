"""uptide: a unified update orchestrator.

uptide drives many independent update steps (package managers, shell plugin
managers, dotfile repositories), each shelling out to a third-party tool. A
failing or missing tool never stops the rest of the run, and a dry run shows
every command without executing anything.
"""

__version__ = "0.1.0"
