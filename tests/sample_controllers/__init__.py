"""Controllers resolved by namespace in the test suite."""

from perch.http.response import Response


class HomeController:
    def handle(self, request, params):
        return "home"


class DefaultController:
    def handle(self, request, params):
        return "default"


class EchoController:
    async def handle(self, request, params):
        return {"path": request.path, "params": list(params)}


class NotAController:
    """Has no handle() method."""


class CreatedController:
    def handle(self, request, params):
        return Response("created").with_status(201)


not_a_class = "just a string"
