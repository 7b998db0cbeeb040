"""Infrastructure: binary wire codec, potion registry and document loading."""
