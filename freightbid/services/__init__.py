"""Domain services: parsing helpers, lane/bid queries and notifications."""
