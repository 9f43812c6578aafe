class ProfileStreamError(RuntimeError):
    """The profiler record stream failed before reaching its end.

    A run that sees this must not report anything: a truncated ranking
    would look complete.
    """
