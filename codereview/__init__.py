"""CodeReview: backend of a code-review learning platform.

Students submit projects and files, reviewers comment line by line and give status
feedback, admins manage cohorts and reviewer assignments, and every event is fanned
out as in-app notifications with optional email copies.

Run the API with ``python -m codereview serve`` or build it in-process::

    from codereview.app import create_app

    app = create_app()
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
