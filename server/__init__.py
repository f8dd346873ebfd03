"""HTTP front end for Queens rooms."""
