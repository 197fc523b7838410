"""Static crop knowledge base: optimum ranges, seasons, priority and baseline yield."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from functools import lru_cache

from cropadvisor.models.crops import CropProfile, OptimumRange
from cropadvisor.models.enums import SeasonEnum

Triple = tuple[float, float, float]

_K = SeasonEnum.kharif
_R = SeasonEnum.rabi
_S = SeasonEnum.summer
_A = SeasonEnum.annual
_P = SeasonEnum.perennial


def _crop(
	name: str,
	seasons: Iterable[SeasonEnum],
	*,
	ph: Triple,
	rainfall: Triple,
	moisture: Triple,
	temperature: Triple,
	npk: tuple[Triple, Triple, Triple],
	base_yield: float,
	priority: int = 1,
) -> CropProfile:
	n, p, k = npk
	return CropProfile(
		name=name,
		seasons=frozenset(seasons),
		ph=OptimumRange(min=ph[0], opt=ph[1], max=ph[2]),
		rainfall=OptimumRange(min=rainfall[0], opt=rainfall[1], max=rainfall[2]),
		moisture=OptimumRange(min=moisture[0], opt=moisture[1], max=moisture[2]),
		temperature=OptimumRange(min=temperature[0], opt=temperature[1], max=temperature[2]),
		nitrogen=OptimumRange(min=n[0], opt=n[1], max=n[2]),
		phosphorus=OptimumRange(min=p[0], opt=p[1], max=p[2]),
		potassium=OptimumRange(min=k[0], opt=k[1], max=k[2]),
		priority=priority,
		base_yield=base_yield,
	)


# Enumeration order is the tie-break order of the shortlist.
CROP_PROFILES: tuple[CropProfile, ...] = (
	# ── Cereals / millets ───────────────────────────────────────────────────
	_crop("Rice", [_K], ph=(5, 6.5, 7.5), rainfall=(800, 1200, 2500), moisture=(60, 80, 100),
		temperature=(20, 28, 35), npk=((60, 100, 150), (30, 60, 90), (30, 60, 90)), priority=2, base_yield=5.5),
	_crop("Wheat", [_R], ph=(6, 6.8, 7.5), rainfall=(300, 450, 900), moisture=(40, 55, 70),
		temperature=(10, 18, 25), npk=((50, 90, 130), (25, 50, 80), (20, 40, 70)), priority=2, base_yield=4.0),
	_crop("Maize", [_K, _R], ph=(5.5, 6.5, 7.5), rainfall=(500, 750, 1000), moisture=(40, 60, 70),
		temperature=(18, 26, 32), npk=((50, 100, 150), (30, 60, 90), (30, 60, 90)), base_yield=6.0),
	_crop("Jowar", [_K, _R], ph=(5.5, 7, 8), rainfall=(400, 600, 800), moisture=(30, 45, 60),
		temperature=(20, 28, 35), npk=((40, 80, 120), (20, 40, 60), (20, 40, 60)), base_yield=3.0),
	_crop("Bajra", [_K], ph=(5, 7, 8.5), rainfall=(250, 400, 600), moisture=(20, 35, 50),
		temperature=(25, 30, 35), npk=((20, 40, 60), (15, 30, 50), (15, 30, 50)), base_yield=2.5),
	_crop("Ragi", [_K], ph=(5, 6.5, 7.5), rainfall=(500, 700, 1000), moisture=(30, 45, 60),
		temperature=(18, 25, 30), npk=((30, 60, 90), (20, 40, 60), (20, 40, 60)), base_yield=2.8),
	_crop("Barley", [_R], ph=(6, 7, 8), rainfall=(300, 500, 800), moisture=(35, 50, 65),
		temperature=(8, 15, 25), npk=((40, 70, 100), (20, 40, 60), (20, 40, 60)), base_yield=3.0),
	# ── Pulses ──────────────────────────────────────────────────────────────
	_crop("Gram", [_R], ph=(6, 7, 8), rainfall=(300, 500, 800), moisture=(25, 40, 55),
		temperature=(15, 20, 25), npk=((20, 30, 40), (20, 40, 60), (15, 30, 45)), base_yield=1.8),
	_crop("Tur", [_K], ph=(6, 7, 8), rainfall=(600, 800, 1000), moisture=(30, 45, 60),
		temperature=(20, 28, 35), npk=((20, 30, 40), (20, 40, 60), (20, 40, 60)), base_yield=1.5),
	_crop("Moong", [_K, _S], ph=(6, 7, 8), rainfall=(500, 700, 1000), moisture=(25, 40, 55),
		temperature=(20, 28, 35), npk=((15, 25, 35), (20, 40, 60), (15, 30, 45)), base_yield=1.2),
	_crop("Urad", [_K], ph=(6, 7, 8), rainfall=(500, 700, 1000), moisture=(25, 40, 55),
		temperature=(20, 28, 35), npk=((15, 25, 35), (20, 40, 60), (15, 30, 45)), base_yield=1.1),
	_crop("Masur", [_R], ph=(6, 7, 8), rainfall=(300, 500, 800), moisture=(25, 40, 55),
		temperature=(10, 18, 25), npk=((20, 30, 40), (20, 40, 60), (15, 30, 45)), base_yield=1.2),
	_crop("Peas", [_R], ph=(6, 7, 7.5), rainfall=(400, 600, 900), moisture=(35, 50, 65),
		temperature=(10, 18, 25), npk=((20, 30, 40), (25, 40, 60), (20, 35, 50)), base_yield=2.0),
	# ── Commercial (sugar, fibre, tobacco) ──────────────────────────────────
	_crop("Sugarcane", [_A], ph=(6, 6.8, 8), rainfall=(750, 1200, 2000), moisture=(60, 75, 90),
		temperature=(20, 27, 35), npk=((120, 180, 250), (60, 80, 100), (60, 120, 180)), priority=2, base_yield=70.0),
	_crop("Cotton", [_K], ph=(6, 7, 8), rainfall=(500, 750, 1100), moisture=(35, 50, 65),
		temperature=(21, 28, 35), npk=((60, 120, 180), (30, 60, 90), (30, 60, 90)), priority=2, base_yield=2.0),
	_crop("Jute", [_K], ph=(5, 6.5, 7.5), rainfall=(1200, 1500, 2000), moisture=(60, 80, 95),
		temperature=(20, 27, 34), npk=((40, 80, 120), (20, 40, 60), (30, 60, 90)), base_yield=2.5),
	_crop("Tobacco", [_R, _S], ph=(5.5, 6.5, 7.5), rainfall=(400, 600, 900), moisture=(30, 45, 60),
		temperature=(18, 25, 30), npk=((40, 60, 80), (20, 40, 60), (40, 80, 120)), base_yield=1.8),
	# ── Oilseeds & protein crops ────────────────────────────────────────────
	_crop("Groundnut", [_K, _R], ph=(6, 6.8, 7.5), rainfall=(500, 800, 1100), moisture=(35, 50, 65),
		temperature=(20, 28, 35), npk=((20, 40, 60), (30, 60, 90), (30, 60, 90)), base_yield=2.5),
	_crop("Soybean", [_K], ph=(6, 6.8, 7.5), rainfall=(600, 800, 1000), moisture=(50, 65, 75),
		temperature=(20, 27, 30), npk=((20, 40, 60), (30, 60, 90), (30, 60, 90)), base_yield=2.2),
	_crop("Mustard", [_R], ph=(6, 7, 8), rainfall=(350, 500, 800), moisture=(30, 45, 60),
		temperature=(10, 18, 25), npk=((40, 80, 120), (30, 50, 70), (20, 40, 60)), base_yield=1.8),
	_crop("Rapeseed", [_R], ph=(6, 7, 8), rainfall=(350, 500, 800), moisture=(30, 45, 60),
		temperature=(10, 18, 25), npk=((40, 80, 120), (30, 50, 70), (20, 40, 60)), base_yield=1.6),
	_crop("Sunflower", [_K, _R], ph=(6, 7, 8), rainfall=(500, 700, 1000), moisture=(30, 45, 60),
		temperature=(20, 25, 32), npk=((40, 80, 120), (30, 60, 90), (30, 60, 90)), base_yield=1.5),
	_crop("Sesame", [_K, _S], ph=(5.5, 6.5, 8), rainfall=(400, 600, 800), moisture=(25, 40, 55),
		temperature=(20, 27, 35), npk=((30, 50, 70), (20, 40, 60), (20, 40, 60)), base_yield=0.8),
	_crop("Castor Seed", [_K, _R], ph=(6, 7, 8), rainfall=(400, 600, 800), moisture=(25, 40, 55),
		temperature=(18, 25, 35), npk=((40, 80, 120), (20, 40, 60), (20, 40, 60)), base_yield=1.5),
	_crop("Linseed", [_R], ph=(6, 7, 8), rainfall=(400, 600, 800), moisture=(25, 40, 55),
		temperature=(10, 18, 25), npk=((30, 60, 90), (20, 40, 60), (20, 40, 60)), base_yield=1.0),
	# ── Plantation crops ────────────────────────────────────────────────────
	_crop("Tea", [_P], ph=(4.5, 5.5, 6.5), rainfall=(1200, 2000, 3000), moisture=(60, 80, 95),
		temperature=(14, 20, 30), npk=((80, 150, 220), (40, 80, 120), (40, 100, 160)), base_yield=2.2),
	_crop("Coffee", [_P], ph=(5, 6, 6.5), rainfall=(1200, 2000, 2500), moisture=(60, 75, 90),
		temperature=(15, 20, 28), npk=((60, 120, 180), (40, 80, 120), (40, 100, 160)), base_yield=1.0),
	_crop("Rubber", [_P], ph=(4.5, 5.5, 6.5), rainfall=(2000, 2500, 3500), moisture=(70, 85, 95),
		temperature=(21, 27, 35), npk=((60, 120, 180), (40, 80, 120), (40, 100, 160)), base_yield=1.5),
	_crop("Coconut", [_P], ph=(5.5, 6.5, 8), rainfall=(1000, 2000, 3000), moisture=(60, 75, 90),
		temperature=(20, 27, 35), npk=((80, 120, 180), (40, 60, 100), (80, 160, 240)), base_yield=8.0),
	# ── Vegetables: roots & bulbs ───────────────────────────────────────────
	_crop("Potato", [_R], ph=(5, 5.5, 7), rainfall=(500, 750, 1200), moisture=(60, 75, 90),
		temperature=(15, 18, 24), npk=((80, 150, 220), (60, 80, 120), (80, 150, 220)), base_yield=25.0),
	_crop("Onion", [_R, _K], ph=(6, 6.5, 7.5), rainfall=(500, 700, 1000), moisture=(50, 65, 80),
		temperature=(15, 22, 30), npk=((60, 100, 150), (40, 60, 90), (40, 80, 120)), base_yield=18.0),
	_crop("Tomato", [_R, _K], ph=(5.5, 6.5, 7.5), rainfall=(600, 800, 1200), moisture=(60, 75, 90),
		temperature=(18, 22, 30), npk=((60, 120, 180), (50, 80, 120), (60, 120, 180)), base_yield=30.0),
	_crop("Garlic", [_R], ph=(6, 6.5, 7.5), rainfall=(500, 700, 1000), moisture=(50, 65, 80),
		temperature=(12, 18, 24), npk=((60, 100, 140), (40, 60, 90), (40, 80, 120)), base_yield=8.0),
	# ── Vegetables: cucurbits & gourds ──────────────────────────────────────
	_crop("Watermelon", [_S], ph=(6, 6.5, 7.5), rainfall=(400, 600, 800), moisture=(40, 55, 70),
		temperature=(22, 28, 35), npk=((40, 80, 120), (30, 60, 90), (40, 80, 120)), base_yield=25.0),
	_crop("Muskmelon", [_S], ph=(6, 6.5, 7.5), rainfall=(400, 600, 800), moisture=(40, 55, 70),
		temperature=(22, 28, 35), npk=((40, 80, 120), (30, 60, 90), (40, 80, 120)), base_yield=15.0),
	_crop("Cucumber", [_S, _K], ph=(5.5, 6.5, 7.5), rainfall=(500, 700, 1000), moisture=(50, 65, 80),
		temperature=(20, 25, 32), npk=((50, 80, 120), (30, 60, 90), (40, 80, 120)), base_yield=15.0),
	_crop("Bitter Gourd", [_S, _K], ph=(5.5, 6.5, 7.5), rainfall=(500, 700, 1000), moisture=(50, 65, 80),
		temperature=(22, 26, 32), npk=((50, 80, 120), (30, 60, 90), (40, 80, 120)), base_yield=12.0),
	# ── Spices & condiments ─────────────────────────────────────────────────
	_crop("Coriander", [_R], ph=(6, 7, 8), rainfall=(400, 600, 800), moisture=(40, 55, 70),
		temperature=(10, 18, 25), npk=((40, 60, 80), (30, 50, 70), (20, 40, 60)), base_yield=1.2),
	_crop("Cumin", [_R], ph=(6, 7, 8), rainfall=(300, 500, 700), moisture=(30, 45, 60),
		temperature=(10, 18, 25), npk=((30, 50, 70), (20, 40, 60), (20, 40, 60)), base_yield=0.6),
	_crop("Fennel", [_R], ph=(6, 7, 8), rainfall=(400, 600, 800), moisture=(35, 50, 65),
		temperature=(10, 18, 25), npk=((40, 60, 80), (30, 50, 70), (20, 40, 60)), base_yield=1.5),
	# ── Fruits ──────────────────────────────────────────────────────────────
	_crop("Mango", [_P], ph=(5.5, 6.5, 7.5), rainfall=(750, 1000, 2500), moisture=(50, 65, 80),
		temperature=(20, 27, 35), npk=((60, 120, 180), (40, 80, 120), (60, 120, 180)), base_yield=10.0),
	_crop("Banana", [_P], ph=(5.5, 6.5, 7.5), rainfall=(1000, 2000, 3000), moisture=(60, 80, 95),
		temperature=(18, 27, 35), npk=((100, 200, 300), (60, 100, 150), (120, 200, 300)), base_yield=40.0),
	_crop("Grapes", [_P], ph=(6, 6.5, 7.5), rainfall=(600, 800, 1000), moisture=(50, 60, 70),
		temperature=(15, 22, 32), npk=((60, 120, 180), (40, 80, 120), (80, 160, 240)), base_yield=20.0),
	_crop("Apple", [_P], ph=(5.5, 6.5, 7.5), rainfall=(800, 1000, 1500), moisture=(50, 65, 80),
		temperature=(5, 18, 24), npk=((60, 120, 180), (40, 80, 120), (60, 120, 180)), base_yield=12.0),
	_crop("Orange", [_P], ph=(5.5, 6.5, 7.5), rainfall=(750, 1000, 1500), moisture=(50, 65, 80),
		temperature=(15, 22, 32), npk=((60, 120, 180), (40, 80, 120), (60, 120, 180)), base_yield=15.0),
)

# Regional / common names → catalogue key.
CROP_ALIASES: dict[str, str] = {
	"paddy": "Rice",
	"corn": "Maize",
	"sorghum": "Jowar",
	"pearl millet": "Bajra",
	"finger millet": "Ragi",
	"chickpea": "Gram",
	"pigeon pea": "Tur",
	"green gram": "Moong",
	"black gram": "Urad",
	"lentil": "Masur",
	"castor": "Castor Seed",
	"flaxseed": "Linseed",
}

# Agronomic family of each catalogue crop; rotation never follows a crop with its own family.
CROP_FAMILIES: dict[str, tuple[str, ...]] = {
	"cereal": ("Rice", "Wheat", "Maize", "Jowar", "Bajra", "Ragi", "Barley"),
	"pulse": ("Gram", "Tur", "Moong", "Urad", "Masur", "Peas"),
	"oilseed": ("Groundnut", "Soybean", "Mustard", "Rapeseed", "Sunflower", "Sesame", "Castor Seed", "Linseed"),
	"cash": ("Sugarcane", "Cotton", "Jute", "Tobacco"),
	"plantation": ("Tea", "Coffee", "Rubber", "Coconut", "Mango", "Banana", "Grapes", "Apple", "Orange"),
	"vegetable": ("Potato", "Onion", "Tomato", "Garlic", "Watermelon", "Muskmelon", "Cucumber", "Bitter Gourd"),
	"spice": ("Coriander", "Cumin", "Fennel"),
}

# Nitrogen-fixing crops: the pulses plus the leguminous oilseeds.
LEGUMES: frozenset[str] = frozenset(CROP_FAMILIES["pulse"] + ("Groundnut", "Soybean"))

_FAMILY_OF: dict[str, str] = {name: family for (family, names) in CROP_FAMILIES.items() for name in names}


def crop_family(name: str) -> str | None:
	return _FAMILY_OF.get(name)


class KnowledgeBase:
	"""Read-only lookup over an immutable, ordered set of crop profiles."""

	def __init__(self, profiles: Iterable[CropProfile], aliases: dict[str, str] | None = None):
		self._profiles: tuple[CropProfile, ...] = tuple(profiles)
		self._index: dict[str, CropProfile] = {}
		for item in self._profiles:
			key = item.name.casefold()
			if key in self._index:
				raise ValueError(f"duplicate crop profile: {item.name}")
			self._index[key] = item
		self._aliases = {alias.casefold(): target for (alias, target) in (aliases or {}).items()}

	def profile(self, name: str | None) -> CropProfile | None:
		if not name:
			return None
		key = str(name).strip().casefold()
		found = self._index.get(key)
		if found is not None:
			return found
		target = self._aliases.get(key)
		if target is None:
			return None
		return self._index.get(target.casefold())

	def require(self, name: str) -> CropProfile:
		found = self.profile(name)
		if found is None:
			raise LookupError(f"Crop {name!r} not found")
		return found

	def profiles(self) -> tuple[CropProfile, ...]:
		return self._profiles

	def names(self) -> list[str]:
		return [item.name for item in self._profiles]

	def __contains__(self, name: object) -> bool:
		return isinstance(name, str) and name.strip().casefold() in self._index

	def __iter__(self) -> Iterator[CropProfile]:
		return iter(self._profiles)

	def __len__(self) -> int:
		return len(self._profiles)


@lru_cache
def get_knowledge_base() -> KnowledgeBase:
	"""Process-wide knowledge base (built once, never mutated)."""
	return KnowledgeBase(CROP_PROFILES, CROP_ALIASES)
