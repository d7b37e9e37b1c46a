"""Client-side lifecycle store and the backends it talks to."""
