"""learnpath - Learner console for online courses."""

__version__ = "0.1.0"
