from .root import go_to_master as go_to_master, run as run
