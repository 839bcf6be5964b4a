"""Operation scripts invoked by the midPoint CMD connector.

Each script resolves the connector for the requested system, performs one
operation and prints the result in the CMD output format. Failures are
logged to stderr and turned into a non-zero exit status.
"""

from abc import ABC, abstractmethod
from typing import Dict, Type

from cli.args import ScriptArgs
from cli.output import print_person, print_persons
from connectors import ConnectorFactory, PersonConnector
from core.config import load_config
from core.errors import BridgeError, ValidationError
from core.mapping import to_canonical
from core.observability.logging import get_logger, with_correlation

logger = get_logger(__name__)

ACCOUNT_OBJECT_CLASS = "__ACCOUNT__"
SEARCH_QUERY_LIMIT = 10
SEARCH_ALL_LIMIT = 100


class BaseScript(ABC):
    """Base class for all operation scripts."""

    operation_name: str = ""

    def __init__(self, args: ScriptArgs):
        self.args = args

    @property
    def uid(self) -> str:
        return self.args.uid

    @property
    def name(self) -> str:
        return self.args.name

    @property
    def attributes(self) -> Dict[str, str]:
        return self.args.attributes

    def validate(self) -> None:
        """Check required arguments before any configuration or network work."""

    @abstractmethod
    async def perform_operation(self, connector: PersonConnector) -> int:
        """Run the operation; returns the process exit status."""

    async def run(self) -> int:
        """Main execution method that handles common patterns."""
        with with_correlation(
            system=self.args.system,
            operation=self.operation_name,
            person_id=self.uid or None,
        ):
            try:
                self.validate()
                config = load_config(self.args.config_path)
                connector = ConnectorFactory.create(self.args.system, debug=self.args.debug, config=config)
                return await self.perform_operation(connector)
            except BridgeError as e:
                logger.error(f"{self.operation_name} failed: {e}", extra_fields={"error_code": e.code})
                return 1
            except Exception as e:
                logger.exception(f"{self.operation_name} failed: {e}")
                return 1

    def require_uid(self) -> None:
        if not self.uid:
            raise ValidationError("uid", self.operation_name)


class ConnectionTestScript(BaseScript):
    operation_name = "connection test"

    async def perform_operation(self, connector: PersonConnector) -> int:
        if await connector.test_connection():
            print("Test successful")
            return 0
        print("Test failed")
        return 1


class CreateScript(BaseScript):
    operation_name = "person creation"

    def validate(self) -> None:
        if not self.name:
            raise ValidationError("name", self.operation_name)

    async def perform_operation(self, connector: PersonConnector) -> int:
        person = to_canonical({**self.attributes, "name": self.name})
        result = await connector.create_person(person)

        # Re-read so the output reflects what the backend stored; the record
        # already exists, so a failed re-read still exits 0
        try:
            created = await connector.get_person(result.id)
        except BridgeError as e:
            logger.warning(f"Person {result.id} was created but could not be read back: {e}")
            created = None

        if created is None:
            logger.warning(f"Person {result.id} was created; printing the submitted attributes")
            created = person
        print_person(created, uid=result.id)
        return 0


class GetScript(BaseScript):
    operation_name = "person lookup"

    def validate(self) -> None:
        self.require_uid()

    async def perform_operation(self, connector: PersonConnector) -> int:
        person = await connector.get_person(self.uid)
        if person is None:
            logger.info(f"Person {self.uid} not found")
            return 0
        print_person(person, uid=self.uid)
        return 0


class UpdateScript(BaseScript):
    operation_name = "person update"

    def validate(self) -> None:
        self.require_uid()

    async def perform_operation(self, connector: PersonConnector) -> int:
        changes = to_canonical(self.attributes)
        logger.debug("Applying changes", extra_fields={"fields": sorted(changes.present_fields())})
        updated = await connector.update_person(self.uid, changes)
        print_person(updated, uid=self.uid)
        return 0


class DeleteScript(BaseScript):
    operation_name = "person deletion"

    def validate(self) -> None:
        self.require_uid()

    async def perform_operation(self, connector: PersonConnector) -> int:
        await connector.delete_person(self.uid)
        print(f"Person {self.uid} deleted successfully")
        return 0


class SearchScript(BaseScript):
    operation_name = "person search"

    async def perform_operation(self, connector: PersonConnector) -> int:
        uid = self.uid.strip()

        if uid and uid != ACCOUNT_OBJECT_CLASS:
            if uid.isascii() and uid.isdigit():
                person = await connector.get_person(uid)
                if person is not None:
                    print_person(person, uid=uid)
                return 0

            persons = await connector.search_persons(uid, SEARCH_QUERY_LIMIT)
            print(f"Found {len(persons)} persons matching '{uid}'")
            print_persons(persons)
            return 0

        persons = await connector.search_persons(None, SEARCH_ALL_LIMIT)
        print(f"Found {len(persons)} total persons")
        print_persons(persons)
        return 0


SCRIPTS: Dict[str, Type[BaseScript]] = {
    "test": ConnectionTestScript,
    "create": CreateScript,
    "get": GetScript,
    "update": UpdateScript,
    "delete": DeleteScript,
    "search": SearchScript,
}
