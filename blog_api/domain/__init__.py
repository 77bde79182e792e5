"""Request validation rules."""
