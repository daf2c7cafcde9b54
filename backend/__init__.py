"""Deploy.AI backend."""
