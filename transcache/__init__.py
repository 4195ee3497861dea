"""transcache command-line front end."""
