"""
Command-line provisioning utilities. Each `main(argv)` returns a process
exit status.
"""
