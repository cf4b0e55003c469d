"""Personal health log: vitals capture, zone classification, history views and export.

This package contains the domain logic and services; the command line in
`healthlog.cli` wires them to a terminal.
"""
