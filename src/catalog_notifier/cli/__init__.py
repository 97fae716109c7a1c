"""
Command line interface (notifierctl).
"""
