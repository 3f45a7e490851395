"""
Command Line Interface Package

Command Structure:
- reconciler: Main entry point with utility commands (version, config, import-data)
- reconciler match: Candidate review, match commits, auto-matching, training
  and skip-pattern insights
"""
