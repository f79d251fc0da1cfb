"""Static reference data: words, meanings and educational content."""
