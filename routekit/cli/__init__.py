"""
routekit command-line interface.

Usage:
    routekit -c routes.yaml routes
    routekit -c routes.yaml match /users/edit/3 --method POST
    routekit -c routes.yaml build article title=hello --type full
    routekit compile "/{controller}/{action}" -d action=index
"""

__cli_name__ = "routekit"
