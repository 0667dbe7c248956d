def attempt_timeout(attempt: int, base_timeout: float) -> float:
    """
    Per-attempt probe timeout for an election determination.

    Attempts are 1-indexed. Each later attempt waits proportionally longer so
    a briefly slow master is found before the port is declared unserved.
    """
    if attempt < 1:
        raise ValueError(f"Err. - attempt must be at least 1, got {attempt}")

    return base_timeout * attempt
