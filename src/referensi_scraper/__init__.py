"""Scraping proxy for referensi.data.kemdikbud.go.id with a file-based JSON cache."""
