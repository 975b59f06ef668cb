"""Small helpers shared by the value objects and normalizers."""
