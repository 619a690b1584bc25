"""StayZone – hotel zones and day-trip clusters from favourited POIs."""
