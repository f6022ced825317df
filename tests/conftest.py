"""Pytest configuration and fixtures."""

import json

import pytest

from engines.data_loader import build_store


def person(name, *features):
    return {'person_name': name, 'features': list(features)}


def feature(name, impact, effort, selected, area='Discovery & Education', description=''):
    return {
        'feature_name': name, 'description': description or f'{name} description',
        'macro_area': area, 'impact': impact, 'effort': effort, 'selected': selected,
    }


@pytest.fixture
def wine_records():
    """Two people, one feature: the reference scenario."""
    return [
        person('A', feature('Wine Cellar App', 5, 1, True, area='"Digital Cellar & Collection Management"')),
        person('B', feature('Wine Cellar App', 3, 1, False, area='"Digital Cellar & Collection Management"')),
    ]


@pytest.fixture
def wine_store(wine_records):
    return build_store(wine_records)


@pytest.fixture
def team_records():
    return [
        person('Anna',
               feature('Alpha', 5, 1, True, area='Discovery & Education'),
               feature('Beta', 2, 4, False, area='Personalization & Advisory'),
               feature('Gamma', 3, 3, True, area='Discovery & Education')),
        person('Bruno',
               feature('Alpha', 3, 2, False, area='Discovery & Education'),
               feature('Beta', 4, 5, True, area='Personalization & Advisory')),
        person('Carla',
               feature('Delta', 1, 1, False, area='Unknown Area')),
    ]


@pytest.fixture
def team_store(team_records):
    return build_store(team_records)


@pytest.fixture
def data_file(tmp_path, team_records):
    path = tmp_path / 'output.json'
    path.write_text(json.dumps(team_records), encoding='utf-8')
    return path


@pytest.fixture
def client(data_file):
    from app import app, STATE

    app.config['TESTING'] = True
    app.config['DATA_FILE'] = str(data_file)
    STATE['loaded'] = False
    with app.test_client() as c:
        yield c
    STATE['loaded'] = False
    app.config.pop('DATA_FILE', None)
