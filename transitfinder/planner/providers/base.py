from abc import ABC, abstractmethod

from transitfinder.planner.types import TargetList


class TargetProvider(ABC):
    name: str

    @abstractmethod
    def list_targets(self) -> TargetList:
        raise NotImplementedError
