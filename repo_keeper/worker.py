"""
This file only exists because celery can't handle a factory function
being passed as the application instance, like this:

  $ celery worker --app=repo_keeper.create_celery_app()

Run the worker, with the daily stale sweep, like this:

  $ celery --app=repo_keeper.worker worker --beat

"""

from repo_keeper import create_celery_app

application = create_celery_app(config="worker")
