"""Job application tracker with local and cloud storage backends."""
