import uvicorn

from core.config import settings
from core.init_app import create_application

# S3 and inference clients are built once here and shared by every request
app = create_application(settings)

if __name__ == "__main__":
    print(f"Starting {settings.PROJECT_NAME}...")
    uvicorn.run(app, host=settings.HOST, port=settings.PORT)
