"""Desktop front-end for the clinic management REST backend."""
