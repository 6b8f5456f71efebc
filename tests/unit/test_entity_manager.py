import threading
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import patch

import pytest
from django.test import SimpleTestCase, override_settings

import entity_mapping
from entity_mapping.core.registry import EntityTypeRegistry
from entity_mapping.core.settings import EntityMappingSettings
from entity_mapping.exceptions import (
    ArgumentError,
    ConfigurationError,
    FieldSelectionError,
)
from entity_mapping.metadata.manager import EntityManager
from entity_mapping.metadata.scanner import MetadataScanner
from entity_mapping.metadata.types import EntityCallInfo, EntityStaticInfo
from tests.models import (
    IList,
    List,
    ListCollection,
    ListItem,
    Profile,
    Team,
    Unmapped,
    Web,
)

pytestmark = pytest.mark.unit


@pytest.fixture
def manager():
    return EntityManager(settings=EntityMappingSettings())


class TestStaticClassInfo:
    def test_interface_resolves_to_cached_concrete_metadata(self, manager):
        info = manager.get_static_class_info(IList)

        assert isinstance(info, EntityStaticInfo)
        assert info.model is List
        assert manager.get_static_class_info(List) is info

    def test_repeated_calls_return_the_cached_instance(self, manager):
        first = manager.get_static_class_info(Web)
        second = manager.get_static_class_info(Web)

        assert first is second
        assert manager.get_cache_stats() == {"size": 1, "hits": 1, "misses": 1}

    def test_unmapped_model_fails_and_is_not_cached(self, manager):
        with pytest.raises(ConfigurationError):
            manager.get_static_class_info(Unmapped)
        with pytest.raises(ConfigurationError):
            manager.get_static_class_info(Unmapped)

        assert manager.get_cache_stats()["size"] == 0

    def test_none_model_is_rejected(self, manager):
        with pytest.raises(ArgumentError):
            manager.get_static_class_info(None)

    def test_clear_cache(self, manager):
        first = manager.get_static_class_info(Web)
        manager.clear_cache()

        assert manager.get_cache_stats() == {"size": 0, "hits": 0, "misses": 0}
        second = manager.get_static_class_info(Web)
        assert second is not first
        assert second == first

    def test_warm_cache(self, manager):
        assert manager.warm_cache([Web, Team, IList]) == 3

        stats = manager.get_cache_stats()
        assert stats["size"] == 3
        assert stats["misses"] == 3


class TestConcurrentAccess:
    def test_concurrent_first_access_publishes_one_instance(self, manager):
        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(manager.get_static_class_info, [List] * 32))

        assert all(result is results[0] for result in results)
        assert manager.get_static_class_info(List) is results[0]

    def test_redundant_scans_converge_on_the_resident_instance(self, manager):
        original_scan = MetadataScanner.scan
        barrier = threading.Barrier(2, timeout=5)

        def slow_scan(scanner, model):
            result = original_scan(scanner, model)
            barrier.wait()
            return result

        with patch.object(MetadataScanner, "scan", autospec=True, side_effect=slow_scan):
            with ThreadPoolExecutor(max_workers=2) as pool:
                futures = [pool.submit(manager.get_static_class_info, Team) for _ in range(2)]
                results = [future.result() for future in futures]

        assert results[0] is results[1]
        assert manager.get_cache_stats()["misses"] == 2
        assert manager.get_cache_stats()["size"] == 1

    def test_concurrent_specialization_is_isolated(self, manager):
        selections = [["Title"], ["Description"], ["TemplateType"], []] * 8

        def specialize(names):
            return names, manager.get_class_info(List, None, *names)

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(specialize, selections))

        for names, call_info in results:
            loaded = {entry.name for entry in call_info.fields_to_load}
            if names:
                assert loaded == set(names) | {"Id"}
            else:
                assert loaded == {entry.name for entry in call_info.fields}
        assert all(entry.load for entry in manager.get_static_class_info(List).fields)


class TestClassInfo:
    def test_returns_call_scoped_copy(self, manager):
        call_info = manager.get_class_info(List, None, List.Title)

        assert isinstance(call_info, EntityCallInfo)
        assert call_info.model is List
        assert call_info.get_field("Title").load is True
        assert call_info.get_field("Id").load is True
        assert call_info.get_field("Description").load is False

    def test_without_selectors(self, manager):
        call_info = manager.get_class_info(IList)

        assert all(entry.load for entry in call_info.fields)
        assert call_info.graph_fields_loaded_via_selection is False

    def test_context_target(self, manager):
        lists = ListCollection(parent=Web())
        target = lists.add(List())

        call_info = manager.get_class_info(List, target, "Title")

        assert call_info.target is Web
        assert call_info.rest_target.target is Web


class TestKeyExpressions:
    def test_accessor_reads_key_value(self, manager):
        team = Team(Id="team-1")

        (accessor,) = manager.get_entity_key_expressions(team)

        assert accessor(team) == "team-1"
        assert accessor(Team(Id="team-2")) == "team-2"

    def test_accessor_is_reusable_across_instances_of_the_type(self, manager):
        item = ListItem(Id=7)
        accessors = manager.get_entity_key_expressions(item)

        assert len(accessors) == 1
        assert [accessors[0](ListItem(Id=n)) for n in (1, 2)] == [1, 2]

    def test_model_without_key_is_a_configuration_error(self, manager):
        with pytest.raises(ConfigurationError) as exc_info:
            manager.get_entity_key_expressions(Profile())

        assert exc_info.value.model_name == "Profile"
        assert "tests.models.Profile" in str(exc_info.value)

    def test_none_entity_is_rejected(self, manager):
        with pytest.raises(ArgumentError):
            manager.get_entity_key_expressions(None)


class TestInstances:
    def test_concrete_instance_with_parent(self, manager):
        web = Web()

        instance = manager.get_concrete_instance(IList, web)

        assert isinstance(instance, List)
        assert instance.parent is web

    def test_concrete_instance_requires_type(self, manager):
        with pytest.raises(ArgumentError):
            manager.get_concrete_instance(None)

    def test_transient_instance(self, manager):
        assert isinstance(manager.get_transient_instance(IList), List)

    def test_injected_registry_is_used(self):
        registry = EntityTypeRegistry()
        registry.register_factory(Web, lambda: Web(Title="Injected"))
        manager = EntityManager(registry=registry, settings=EntityMappingSettings())

        assert manager.get_concrete_instance(Web).Title == "Injected"


class TestManagerSettings(SimpleTestCase):
    def setUp(self):
        self.manager = EntityManager()

    @override_settings(ENTITY_MAPPING={"strict_field_selection": True})
    def test_strict_selection_from_django_settings(self):
        with self.assertRaises(FieldSelectionError):
            self.manager.get_class_info(List, None, lambda l: l.Parent.Title)

    @override_settings(ENTITY_MAPPING={"strict_field_selection": False})
    def test_lenient_selection_from_django_settings(self):
        call_info = self.manager.get_class_info(List, None, lambda l: l.Parent.Title)

        self.assertFalse(call_info.rest_fields_loaded_via_selection)

    @override_settings(ENTITY_MAPPING={"graph_key_field": "uid"})
    def test_graph_key_field_from_django_settings(self):
        info = self.manager.get_static_class_info(Team)

        self.assertEqual(info.graph_targets[0].id, "uid")

    def test_settings_are_resolved_once_per_change(self):
        with patch.object(
            EntityMappingSettings, "from_settings", wraps=EntityMappingSettings.from_settings
        ) as from_settings:
            with override_settings(ENTITY_MAPPING={"strict_field_selection": True}):
                first = self.manager.settings
                self.manager.get_class_info(List, None, List.Title)
                self.manager.get_class_info(List, None, List.Description)

                self.assertIs(self.manager.settings, first)
                self.assertEqual(from_settings.call_count, 1)

            self.assertFalse(self.manager.settings.strict_field_selection)
            self.assertEqual(from_settings.call_count, 2)

    def test_field_selector_is_reused_while_settings_are_unchanged(self):
        self.manager.get_class_info(List, None, List.Title)
        selector = self.manager._selector
        self.manager.get_class_info(List, None, List.Description)

        self.assertIs(self.manager._selector, selector)

        with override_settings(ENTITY_MAPPING={"strict_field_selection": True}):
            self.manager.get_class_info(List, None, List.Title)

            self.assertIsNot(self.manager._selector, selector)
            self.assertTrue(self.manager._selector.settings.strict_field_selection)


class TestModuleFunctions(SimpleTestCase):
    def setUp(self):
        entity_mapping.entity_manager.clear_cache()

    def tearDown(self):
        entity_mapping.entity_manager.clear_cache()

    def test_global_manager(self):
        self.assertIs(entity_mapping.get_entity_manager(), entity_mapping.entity_manager)

    def test_convenience_functions(self):
        info = entity_mapping.get_static_class_info(IList)
        call_info = entity_mapping.get_class_info(IList, None, List.Title)
        team = entity_mapping.get_concrete_instance(Team)
        team.Id = "t"
        (accessor,) = entity_mapping.get_entity_key_expressions(team)

        self.assertIs(info.model, List)
        self.assertEqual(call_info.selected_fields, ["Title"])
        self.assertEqual(accessor(team), "t")
        self.assertIsInstance(entity_mapping.get_transient_instance(Web), Web)
