""" Rolling restart of Cloud Foundry application instances
"""

__version__ = "1.0.0"
