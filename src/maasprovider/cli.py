# Copyright 2026 Canonical Ltd.  This software is licensed under the
# GNU Affero General Public License version 3 (see the file LICENSE).

"""Drive resource lifecycle operations from the command line.

Each command loads the provider configuration, runs one operation against
the MAAS server, and prints the resulting state as JSON.
"""

from abc import ABCMeta, abstractmethod
import argparse
from inspect import getdoc
import json
import logging
from pathlib import Path
import sys

import yaml

from maasprovider.config import load_provider_config
from maasprovider.context import Context
from maasprovider.exceptions import (
    diagnostics_from_exception,
    ProviderException,
)
from maasprovider.logging import configure_logging
from maasprovider.raid import RaidResource

CommandError = SystemExit


class Command(metaclass=ABCMeta):
    """A base class for composing commands."""

    def __init__(self, parser):
        super().__init__()
        self.parser = parser

    @abstractmethod
    def __call__(self, options):
        """Execute this command."""


class ArgumentParser(argparse.ArgumentParser):
    """Specialisation of argparse's parser with better support for subparsers.

    Specifically, the one-shot `add_subparsers` call is disabled, replaced by
    a lazily evaluated `subparsers` property.
    """

    def __init__(self, *args, **kwargs):
        kwargs.setdefault(
            "formatter_class", argparse.RawDescriptionHelpFormatter
        )
        super().__init__(*args, **kwargs)

    def add_subparsers(self):
        raise NotImplementedError("add_subparsers has been disabled")

    @property
    def subparsers(self):
        try:
            return self.__subparsers
        except AttributeError:
            parent = super()
            self.__subparsers = parent.add_subparsers(title="drill down")
            self.__subparsers.metavar = "COMMAND"
            return self.__subparsers


def parse_docstring(thing):
    """Return the title and body of the docstring of `thing`."""
    doc = getdoc(thing) or ""
    title, _, body = doc.partition("\n\n")
    return " ".join(title.split()), body


def load_document(path):
    """Load a YAML (or JSON) mapping from `path`."""
    try:
        data = yaml.safe_load(Path(path).read_text())
    except (OSError, yaml.YAMLError) as error:
        raise CommandError(f"Cannot read {path}: {error}") from error
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise CommandError(f"{path} does not contain a mapping")
    return data


def print_diagnostics(diagnostics, file=None):
    file = sys.stderr if file is None else file
    for diagnostic in diagnostics:
        line = f"{diagnostic.severity}: {diagnostic.summary}"
        if diagnostic.detail:
            line += f" ({diagnostic.detail})"
        print(line, file=file)


class ResourceCommand(Command):
    """Base for commands that run one lifecycle operation."""

    resource_class = RaidResource
    # The `Resource.apply_*` method to call.
    operation = None
    takes_resource = True
    takes_id = True
    prints_state = True

    def __init__(self, parser):
        super().__init__(parser)
        if self.takes_resource:
            parser.add_argument(
                "--resource",
                required=True,
                help="YAML or JSON file holding the resource configuration.",
            )
        if self.takes_id:
            parser.add_argument(
                "--id", required=True, help="The ID of the resource."
            )
            parser.add_argument(
                "--state",
                help="YAML or JSON file holding the previously read state.",
            )

    def make_data(self, resource, options):
        raw = load_document(options.resource) if self.takes_resource else None
        state = None
        if self.takes_id and options.state is not None:
            state = load_document(options.state)
            state.pop("id", None)
        return resource.new_data(
            raw, id=getattr(options, "id", "") or "", state=state
        )

    def __call__(self, options):
        resource = self.resource_class()
        try:
            data = self.make_data(resource, options)
            config = load_provider_config(options.config)
        except ProviderException as error:
            print_diagnostics(diagnostics_from_exception(error))
            raise CommandError(1) from error
        context = Context(config.get_client())
        diagnostics = getattr(resource, self.operation)(data, context)
        if diagnostics:
            print_diagnostics(diagnostics)
            raise CommandError(1)
        if self.prints_state:
            print(json.dumps(data.to_dict(), indent=2, sort_keys=True))


class cmd_create(ResourceCommand):
    """Create a RAID.

    The RAID is built on the machine named in the resource configuration,
    from the block devices and partitions listed there.
    """

    operation = "apply_create"
    takes_id = False


class cmd_read(ResourceCommand):
    """Read a RAID and print its current state."""

    operation = "apply_read"


class cmd_update(ResourceCommand):
    """Update a RAID to match its configuration.

    Members are added to and removed from the RAID as needed; the name is
    changed if one is configured.
    """

    operation = "apply_update"


class cmd_delete(ResourceCommand):
    """Delete a RAID."""

    operation = "apply_delete"
    prints_state = False


class cmd_import(ResourceCommand):
    """Print the state of an existing RAID, given MACHINE:RAID.

    MACHINE is a system ID, hostname, or FQDN; RAID is an ID or a name.
    """

    operation = "apply_import"
    takes_resource = False
    takes_id = False

    def __init__(self, parser):
        super().__init__(parser)
        parser.add_argument(
            "id", metavar="MACHINE:RAID", help="The RAID to import."
        )


RESOURCES = {
    "raid": (
        RaidResource,
        {
            "create": cmd_create,
            "read": cmd_read,
            "update": cmd_update,
            "delete": cmd_delete,
            "import": cmd_import,
        },
    ),
}


def register_cli_commands(parser):
    """Register a sub-command per resource, and one per operation."""
    for resource_name, (resource_class, commands) in RESOURCES.items():
        help_title, help_body = parse_docstring(resource_class)
        resource_parser = parser.subparsers.add_parser(
            resource_name,
            help=help_title,
            description=help_title,
            epilog=help_body,
        )
        for name, command in commands.items():
            help_title, help_body = parse_docstring(command)
            command_parser = resource_parser.subparsers.add_parser(
                name, help=help_title, description=help_title, epilog=help_body
            )
            command_parser.set_defaults(execute=command(command_parser))


def prepare_parser(argv):
    """Create and populate an arguments parser for the command."""
    help_title, help_body = parse_docstring(sys.modules[__name__])
    parser = ArgumentParser(
        description=help_body,
        prog=Path(argv[0]).name,
        epilog="https://maas.io/",
    )
    parser.add_argument(
        "--config",
        default=None,
        help=(
            "The provider configuration file. Defaults to "
            "$MAAS_PROVIDER_CONFIG or ~/.maas-provider.yaml."
        ),
    )
    parser.add_argument(
        "-d",
        "--debug",
        action="store_true",
        default=False,
        help="Log API requests and other details to stderr.",
    )
    register_cli_commands(parser)
    return parser


def main(argv=None):
    if argv is None:
        argv = sys.argv
    parser = prepare_parser(argv)
    options = parser.parse_args(argv[1:])
    configure_logging(logging.DEBUG if options.debug else logging.WARNING)
    if not hasattr(options, "execute"):
        parser.error("too few arguments")
    try:
        options.execute(options)
    except KeyboardInterrupt:
        raise SystemExit(1)  # noqa: B904
    except Exception as error:
        if options.debug:
            raise
        # Note: this will call sys.exit() when finished.
        parser.error("%s" % error)
