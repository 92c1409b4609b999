"""
dnl_launcher package
--------------------
Dark & Light dedicated server supervisor for a host orchestrator.
Contains modules for settings, logging, runtime file staging, launch
command building, process supervision with console capture, and
GameUserSettings.ini provisioning from a remote template.
"""

__version__ = "1.1.0"
