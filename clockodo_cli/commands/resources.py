"""Customers, projects, services and users"""
from typing import List, Optional

import click

from clockodo_cli.commands.common import (
    DefaultCommandGroup,
    confirm_delete,
    drop_none,
    output_mode,
    output_options,
)
from clockodo_cli.context import AppContext, pass_app
from clockodo_cli.errors import POSITIVE_INT, parse_id
from clockodo_cli.output import (
    OutputMode,
    command_result,
    print_detail,
    print_info,
    print_result,
    print_success,
    print_table,
)
from clockodo_cli.types import Billability, JsonDict


def yes_no(value: Optional[bool]) -> str:
    return "Yes" if value else "No"


def list_filter(
    active: bool, search: Optional[str], customer: Optional[int] = None
) -> Optional[JsonDict]:
    params = drop_none(
        {
            "customers_id": customer,
            "active": True if active else None,
            "fulltext": search,
        }
    )
    return params or None


def _print_items(
    app: AppContext,
    items: List[JsonDict],
    headers: List[str],
    rows: List[List[str]],
    empty_message: str,
) -> None:
    if output_mode(app) is not OutputMode.HUMAN:
        print_result(command_result(items, meta={"count": len(items)}), app.options)
        return
    if not items:
        print_info(empty_message)
        return
    print_table(headers, rows, app.options)


def _print_changed(app: AppContext, data: JsonDict, message: str) -> None:
    if output_mode(app) is not OutputMode.HUMAN:
        print_result(command_result(data), app.options)
        return
    print_success(message)


# Customers


@click.group(cls=DefaultCommandGroup, help="Manage customers")
def customers() -> None:
    pass


@customers.command(name="list", help="List customers")
@click.option("--active", is_flag=True, help="Show only active customers")
@click.option("--search", help="Search by name")
@output_options
@pass_app
def list_customers(app: AppContext, active: bool, search: Optional[str]) -> None:
    items = app.client.get_customers(filter=list_filter(active, search))
    rows = [
        [str(c["id"]), c["name"], c.get("number") or "—", yes_no(c.get("active"))]
        for c in items
    ]
    _print_items(
        app, items, ["ID", "Name", "Number", "Active"], rows, "No customers found."
    )


@customers.command(name="get", help="Get customer details")
@click.argument("customer_id")
@output_options
@pass_app
def get_customer(app: AppContext, customer_id: str) -> None:
    customer = app.client.get_customer(id=parse_id(customer_id))

    if output_mode(app) is not OutputMode.HUMAN:
        print_result(command_result(customer), app.options)
        return

    print_detail(
        [
            ("ID", customer["id"]),
            ("Name", customer.get("name")),
            ("Number", customer.get("number")),
            ("Active", customer.get("active")),
            ("Billable Default", customer.get("billable_default")),
            ("Note", customer.get("note")),
        ],
        app.options,
    )


def _customer_params(
    name: Optional[str],
    number: Optional[str],
    note: Optional[str],
    active: Optional[bool],
    billable: Optional[bool],
) -> JsonDict:
    billable_default = None
    if billable is not None:
        billable_default = int(Billability.from_flag(billable))

    return drop_none(
        {
            "name": name,
            "number": number,
            "note": note,
            "active": active,
            "billable_default": billable_default,
        }
    )


@customers.command(name="create", help="Create a customer")
@click.option("--name", required=True, help="Customer name")
@click.option("--number", help="Customer number")
@click.option("--note", help="Note")
@click.option("--active/--no-active", default=None, help="Set as (in)active")
@click.option("--billable/--no-billable", default=None, help="Billable by default")
@output_options
@pass_app
def create_customer(
    app: AppContext,
    name: str,
    number: Optional[str],
    note: Optional[str],
    active: Optional[bool],
    billable: Optional[bool],
) -> None:
    params = _customer_params(name, number, note, active, billable)
    customer = app.client.add_customer(params)
    _print_changed(
        app, customer, f"Customer created (ID: {customer['id']}) {customer['name']}"
    )


@customers.command(name="update", help="Update a customer")
@click.argument("customer_id")
@click.option("--name", help="New name")
@click.option("--number", help="New number")
@click.option("--note", help="New note")
@click.option("--active/--no-active", default=None, help="Set as (in)active")
@click.option("--billable/--no-billable", default=None, help="Billable by default")
@output_options
@pass_app
def update_customer(
    app: AppContext,
    customer_id: str,
    name: Optional[str],
    number: Optional[str],
    note: Optional[str],
    active: Optional[bool],
    billable: Optional[bool],
) -> None:
    id = parse_id(customer_id)
    params = _customer_params(name, number, note, active, billable)
    customer = app.client.edit_customer(id, params)
    _print_changed(app, customer, f"Customer {id} updated")


@customers.command(name="delete", help="Delete a customer")
@click.argument("customer_id")
@click.option("-f", "--force", is_flag=True, help="Skip confirmation")
@output_options
@pass_app
def delete_customer(app: AppContext, customer_id: str, force: bool) -> None:
    id = parse_id(customer_id)
    if not confirm_delete(f"customer {id}", force):
        return

    app.client.delete_customer(id)
    _print_changed(app, {"success": True, "id": id}, f"Customer {id} deleted")


# Projects


@click.group(cls=DefaultCommandGroup, help="Manage projects")
def projects() -> None:
    pass


@projects.command(name="list", help="List projects")
@click.option("--customer", type=POSITIVE_INT, help="Filter by customer ID")
@click.option("--active", is_flag=True, help="Show only active projects")
@click.option("--search", help="Search by name")
@output_options
@pass_app
def list_projects(
    app: AppContext, customer: Optional[int], active: bool, search: Optional[str]
) -> None:
    items = app.client.get_projects(filter=list_filter(active, search, customer))
    rows = [
        [
            str(p["id"]),
            p["name"],
            p.get("number") or "—",
            str(p.get("customers_id")),
            yes_no(p.get("active")),
            yes_no(p.get("completed")),
        ]
        for p in items
    ]
    headers = ["ID", "Name", "Number", "Customer", "Active", "Completed"]
    _print_items(app, items, headers, rows, "No projects found.")


@projects.command(name="get", help="Get project details")
@click.argument("project_id")
@output_options
@pass_app
def get_project(app: AppContext, project_id: str) -> None:
    project = app.client.get_project(id=parse_id(project_id))

    if output_mode(app) is not OutputMode.HUMAN:
        print_result(command_result(project), app.options)
        return

    budget = project.get("budget") or {}
    print_detail(
        [
            ("ID", project["id"]),
            ("Name", project.get("name")),
            ("Number", project.get("number")),
            ("Customer ID", project.get("customers_id")),
            ("Active", project.get("active")),
            ("Completed", project.get("completed")),
            ("Budget", budget.get("amount")),
            ("Budget Type", "Money" if budget.get("monetary") else "Hours"),
            ("Note", project.get("note")),
        ],
        app.options,
    )


def _project_params(
    name: Optional[str],
    customer: Optional[int],
    number: Optional[str],
    note: Optional[str],
    active: Optional[bool],
    billable: Optional[bool],
) -> JsonDict:
    return drop_none(
        {
            "name": name,
            "customers_id": customer,
            "number": number,
            "note": note,
            "active": active,
            "billable_default": billable,
        }
    )


@projects.command(name="create", help="Create a project")
@click.option("--name", required=True, help="Project name")
@click.option("--customer", type=POSITIVE_INT, required=True, help="Customer ID")
@click.option("--number", help="Project number")
@click.option("--note", help="Note")
@click.option("--active/--no-active", default=None, help="Set as (in)active")
@click.option("--billable/--no-billable", default=None, help="Billable by default")
@output_options
@pass_app
def create_project(
    app: AppContext,
    name: str,
    customer: int,
    number: Optional[str],
    note: Optional[str],
    active: Optional[bool],
    billable: Optional[bool],
) -> None:
    params = _project_params(name, customer, number, note, active, billable)
    project = app.client.add_project(params)
    _print_changed(
        app, project, f"Project created (ID: {project['id']}) {project['name']}"
    )


@projects.command(name="update", help="Update a project")
@click.argument("project_id")
@click.option("--name", help="New name")
@click.option("--customer", type=POSITIVE_INT, help="New customer ID")
@click.option("--number", help="New number")
@click.option("--note", help="New note")
@click.option("--active/--no-active", default=None, help="Set as (in)active")
@click.option("--billable/--no-billable", default=None, help="Billable by default")
@output_options
@pass_app
def update_project(
    app: AppContext,
    project_id: str,
    name: Optional[str],
    customer: Optional[int],
    number: Optional[str],
    note: Optional[str],
    active: Optional[bool],
    billable: Optional[bool],
) -> None:
    id = parse_id(project_id)
    params = _project_params(name, customer, number, note, active, billable)
    project = app.client.edit_project(id, params)
    _print_changed(app, project, f"Project {id} updated")


@projects.command(name="delete", help="Delete a project")
@click.argument("project_id")
@click.option("-f", "--force", is_flag=True, help="Skip confirmation")
@output_options
@pass_app
def delete_project(app: AppContext, project_id: str, force: bool) -> None:
    id = parse_id(project_id)
    if not confirm_delete(f"project {id}", force):
        return

    app.client.delete_project(id)
    _print_changed(app, {"success": True, "id": id}, f"Project {id} deleted")


# Services


@click.group(cls=DefaultCommandGroup, help="Manage services")
def services() -> None:
    pass


@services.command(name="list", help="List services")
@click.option("--active", is_flag=True, help="Show only active services")
@click.option("--search", help="Search by name")
@output_options
@pass_app
def list_services(app: AppContext, active: bool, search: Optional[str]) -> None:
    items = app.client.get_services(filter=list_filter(active, search))
    rows = [
        [str(s["id"]), s["name"], s.get("number") or "—", yes_no(s.get("active"))]
        for s in items
    ]
    _print_items(
        app, items, ["ID", "Name", "Number", "Active"], rows, "No services found."
    )


@services.command(name="get", help="Get service details")
@click.argument("service_id")
@output_options
@pass_app
def get_service(app: AppContext, service_id: str) -> None:
    service = app.client.get_service(id=parse_id(service_id))

    if output_mode(app) is not OutputMode.HUMAN:
        print_result(command_result(service), app.options)
        return

    print_detail(
        [
            ("ID", service["id"]),
            ("Name", service.get("name")),
            ("Number", service.get("number")),
            ("Active", service.get("active")),
            ("Note", service.get("note")),
        ],
        app.options,
    )


# Users


@click.group(help="User management")
def users() -> None:
    pass


@users.command(help="Show current user info")
@output_options
@pass_app
def me(app: AppContext) -> None:
    user = app.client.get_me()

    if output_mode(app) is not OutputMode.HUMAN:
        print_result(command_result(user), app.options)
        return

    print_detail(
        [
            ("ID", user["id"]),
            ("Name", user.get("name")),
            ("Email", user.get("email")),
            ("Role", user.get("role")),
            ("Active", user.get("active")),
        ],
        app.options,
    )


@users.command(name="list", help="List all users")
@output_options
@pass_app
def list_users(app: AppContext) -> None:
    items = app.client.get_users()
    rows = [
        [
            str(u["id"]),
            u.get("name") or "—",
            u.get("email") or "—",
            u.get("role") or "—",
            yes_no(u.get("active")),
        ]
        for u in items
    ]
    headers = ["ID", "Name", "Email", "Role", "Active"]
    _print_items(app, items, headers, rows, "No users found.")
