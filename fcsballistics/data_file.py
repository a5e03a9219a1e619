"""
Reader for the intermediate ``Data/{vehicle}.txt`` format.

A header block of ``Key:Value`` lines (plus a bare ``HasLaser`` flag) is
followed by blank-line separated projectile blocks:

    Name:105mm_m735
    Type:apds_fs_tungsten_l10_l15_tank
    BulletMass:3.719457
    BallisticCaliber:0.035
    Speed:1501.14
    Cx:0.2925
    APDS0:292.4
    APDS100:290.6
    ...

Missing or unparseable numbers read as 0.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from .projectile import ProjectileRecord


_NUMERIC_FIELDS = {
    'BulletMass': 'mass',
    'BallisticCaliber': 'caliber',
    'Speed': 'speed',
    'Cx': 'cx',
    'ExplosiveMass': 'explosive_mass',
    'DamageMass': 'damage_mass',
    'DamageCaliber': 'damage_caliber',
    'demarrePenetrationK': 'demarre_k',
    'demarreSpeedPow': 'demarre_speed_pow',
    'demarreMassPow': 'demarre_mass_pow',
    'demarreCaliberPow': 'demarre_caliber_pow',
}

_ARMOR_POWER_PREFIX = 'APDS'


@dataclass
class DataProjectile:
    """A projectile block: raw identity plus the physics record."""
    name: str
    bullet_type: str
    record: ProjectileRecord

    @property
    def output_name(self) -> str:
        return self.record.output_name

    @property
    def shell_type(self) -> str:
        return self.record.shell_type


@dataclass
class VehicleData:
    vehicle_id: str
    weapon_path: Optional[str] = None
    rocket_paths: List[str] = field(default_factory=list)
    zoom_in: Optional[float] = None
    zoom_out: Optional[float] = None
    has_laser: bool = False
    projectiles: List[DataProjectile] = field(default_factory=list)


def normalize_shell_type(raw_type: str) -> str:
    """
    Tag used for family dispatch: 'apds_fs' when the raw type contains it,
    otherwise the first '_' segment ('apcbc_tank' -> 'apcbc').
    """
    if 'apds_fs' in raw_type:
        return 'apds_fs'
    return raw_type.split('_')[0]


def clean_shell_name(name: str) -> str:
    """Output file stem: drop anything after '/', strip the 'NNmm_' prefix."""
    name = name.split('/')[0]
    pos = name.find('mm_')
    if pos >= 0:
        return name[pos + 3:]
    return name


def _parse_float(value: Optional[str]) -> float:
    if value is None:
        return 0.0
    try:
        return float(value)
    except ValueError:
        return 0.0


def _parse_optional_float(value: str) -> Optional[float]:
    try:
        return float(value)
    except ValueError:
        return None


def parse_projectile_block(block: str) -> Optional[DataProjectile]:
    """One projectile block, or None when it has no Name line."""
    fields: Dict[str, str] = {}
    armor_power = []

    for line in block.splitlines():
        line = line.strip()
        if not line or ':' not in line:
            continue
        key, value = line.split(':', 1)
        if key.startswith(_ARMOR_POWER_PREFIX):
            try:
                armor_power.append((float(key[len(_ARMOR_POWER_PREFIX):]), float(value)))
            except ValueError:
                continue
        else:
            fields[key] = value

    if 'Name' not in fields:
        return None

    name = fields['Name']
    bullet_type = fields.get('Type', '')
    armor_power.sort(key=lambda entry: entry[0])

    numbers = {attr: _parse_float(fields.get(key)) for key, attr in _NUMERIC_FIELDS.items()}
    record = ProjectileRecord(
        shell_type=normalize_shell_type(bullet_type),
        armor_power=tuple(armor_power),
        output_name=clean_shell_name(name),
        **numbers,
    )
    return DataProjectile(name=name, bullet_type=bullet_type, record=record)


def parse_data_text(content: str, vehicle_id: str) -> VehicleData:
    content = content.replace('\r\n', '\n')
    sections = content.split('\n\n')
    data = VehicleData(vehicle_id=vehicle_id)

    for line in sections[0].splitlines():
        line = line.strip()
        if line == 'HasLaser':
            data.has_laser = True
            continue
        if ':' not in line:
            continue
        key, value = line.split(':', 1)
        if key == 'WeaponPath':
            data.weapon_path = value
        elif key == 'RocketPath':
            data.rocket_paths.append(value)
        elif key == 'ZoomIn':
            data.zoom_in = _parse_optional_float(value)
        elif key == 'ZoomOut':
            data.zoom_out = _parse_optional_float(value)

    for section in sections[1:]:
        proj = parse_projectile_block(section)
        if proj is not None:
            data.projectiles.append(proj)

    return data


def parse_data_file(path) -> VehicleData:
    """Read and parse one data file; the vehicle id is the file stem."""
    path = Path(path)
    return parse_data_text(path.read_text(encoding='utf-8'), path.stem)
