"""HTTP interface for the destinations catalog and the sightings log."""
