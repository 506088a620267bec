"""
Static data for the installer: directory names, log file names,
repository URLs and environment variable names.

Usage::

    from ug4bootstrap.core.data.constants import WORKSPACE_NAME, UGHUB_HTTPS_URL
"""
