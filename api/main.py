#region imports
from AppSettings import settings
from apiapp import fastapiapp
from Controllers import BookReviewController

#endregion imports
app = fastapiapp


def run():
    import uvicorn
    uvicorn.run("main:app", host=settings.API_HOST, port=settings.API_PORT)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host=settings.API_HOST, port=settings.API_PORT, reload=True)
