import uvicorn
import logging

from logging_setup import setup_logging
from api.app import app
from api.ai.routes import ai_router
from api.export.routes import export_router
from api.intake.routes import intake_router
from api.projects.routes import projects_router
from api.seating.routes import seating_router

# Configure root logging once (respects LOG_LEVEL env).
setup_logging()

logging.info("Application starting up...")

# Include routers
app.include_router(intake_router, prefix="/intake", tags=["Intake"])
app.include_router(projects_router, prefix="/projects", tags=["Projects"])
app.include_router(seating_router, prefix="/projects/{project_id}/seating", tags=["Seating"])
app.include_router(export_router, prefix="/projects/{project_id}/export", tags=["Export"])
app.include_router(ai_router, prefix="/ai", tags=["AI"])

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8765)
