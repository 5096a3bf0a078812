"""twtfeed: twtxt feed parsing and rendering."""
