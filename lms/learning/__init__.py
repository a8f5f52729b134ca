"""Learning bounded context: domain records, repositories, scoping, progress and use cases."""
