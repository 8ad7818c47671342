"""Run the Taskboard backend with uvicorn."""
import uvicorn

from taskboard import config

if __name__ == "__main__":
    uvicorn.run("taskboard.main:app", host=config.HOST, port=config.PORT)
