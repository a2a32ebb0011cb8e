"""Key management across local, remote and hardware wallet backends."""
