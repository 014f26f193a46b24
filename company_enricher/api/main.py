"""FastAPI application setup."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from company_enricher import __version__
from company_enricher.models.database import init_db
from .routes import router

# Initialize database
init_db()

# Create FastAPI app
app = FastAPI(
    title="Company Enricher",
    description="Fill gaps in company records from Wikipedia articles",
    version=__version__,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": __version__}


# Include API routes
app.include_router(router, prefix="/api")
