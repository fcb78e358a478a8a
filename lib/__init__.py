"""Library code for the interval alarm."""
