"""Human and machine renderings of command outcomes."""
