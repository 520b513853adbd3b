"""RoseMatch discovery and matching backend."""
