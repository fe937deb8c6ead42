# Metadata for create_all picks up models imported here
from .exercise import Exercise
