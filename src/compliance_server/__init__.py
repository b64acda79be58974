"""compliance_server: FastAPI REST API for the research compliance navigator."""
