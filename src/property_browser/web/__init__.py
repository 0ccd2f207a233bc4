"""JSON web API for browsing listings and managing saved properties."""
