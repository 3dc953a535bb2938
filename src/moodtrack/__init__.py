"""moodtrack - personal mood and health tracker."""

__version__ = "0.1.0"
