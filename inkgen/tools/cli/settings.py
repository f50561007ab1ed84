import rich_click as click


click.rich_click.USE_RICH_MARKUP = True
click.rich_click.SHOW_ARGUMENTS = True
click.rich_click.GROUP_ARGUMENTS_OPTIONS = True
click.rich_click.COMMAND_GROUPS = {
    "inkgen": [
        {
            "name": "Code generation",
            "commands": ["typegen", "show"],
        },
        {
            "name": "Inspection",
            "commands": ["types"],
        },
    ]
}

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])

LOG_FORMAT = '%(asctime)s [%(levelname)s] [%(filename)s:%(lineno)s] %(message)s'

DEFAULT_CONFIG = "inkgen.json"

COLOR_CHOICES = ["auto", "standard", "256", "truecolor", "windows", "none"]
