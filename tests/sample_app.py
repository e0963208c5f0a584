"""Module-level apps used by the CLI tests."""

from perch import App, AppConfig

app = App(AppConfig(controller_namespace="sample_controllers"))
app.get("/posts/{slug}", "blog.PostController")
app.post("/things", "CreatedController")
app.when("home,front_page", "HomeController")
app.when([], "DefaultController")

broken = App(AppConfig(controller_namespace="sample_controllers"))
broken.get("/", "HomeController")
broken.when("single", "MissingController")
broken.when("page", "NotAController")

empty = App()


def create_app() -> App:
    factory_app = App()
    factory_app.when("home", "HomeController")
    return factory_app


not_an_app = "hello"
