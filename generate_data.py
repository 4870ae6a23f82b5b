import json
import random
import uuid
from datetime import datetime, timedelta, timezone
from pathlib import Path

import numpy as np
import pandas as pd

# --- Configuration for Data Generation ---
SEED = 42
NUM_SUPERVISORS = 3
NUM_FIELD_OFFICERS = 12
NUM_FARMERS = 180
DAYS_OF_DATA = 60
AVG_VISITS_PER_FARMER = 3
INACTIVE_OFFICER_SHARE = 0.15
OFFICERS_WITHOUT_TARGETS = 2

END_DATE = datetime.now(timezone.utc)
START_DATE = END_DATE - timedelta(days=DAYS_OF_DATA - 1)

rng = np.random.default_rng(SEED)
random.seed(SEED)

# Region -> (sub counties, approximate centre used to scatter GPS points)
REGIONS = {
    "Central": (["Kampala", "Wakiso", "Mukono"], (0.35, 32.58)),
    "Eastern": (["Mbale", "Jinja", "Soroti"], (1.08, 34.17)),
    "Northern": (["Gulu", "Lira", "Kitgum"], (2.78, 32.30)),
    "Western": (["Mbarara", "Kasese", "Hoima"], (-0.61, 30.65)),
}
FIRST_NAMES = ["Aisha", "Brian", "Catherine", "David", "Esther", "Francis", "Grace", "Henry", "Irene",
               "James", "Joyce", "Moses", "Naomi", "Oscar", "Patience", "Robert", "Sarah", "Timothy"]
LAST_NAMES = ["Okello", "Namubiru", "Mugisha", "Achieng", "Ssempala", "Atim", "Byaruhanga", "Nakato",
              "Opio", "Kyomuhendo", "Wanyama", "Nansubuga"]

VISIT_STATUSES = ["completed", "incomplete", "in_progress", "pending"]
VISIT_STATUS_WEIGHTS = [0.6, 0.1, 0.15, 0.15]
MEDIA_TYPES = ["photo", "video"]
MEDIA_TYPE_WEIGHTS = [0.8, 0.2]
ISSUE_TYPES = ["farmer_dispute", "equipment", "access_denied", "data_error"]
ISSUE_STATUSES = ["open", "under_review", "resolved", "rejected"]
TRANSFER_STATUSES = ["pending", "approved", "rejected"]


def _new_id() -> str:
    return str(uuid.UUID(int=random.getrandbits(128)))


def _random_moment(start: datetime, end: datetime) -> datetime:
    seconds = int((end - start).total_seconds())
    return start + timedelta(seconds=int(rng.integers(0, max(seconds, 1))))


def _person_name() -> str:
    return f"{random.choice(FIRST_NAMES)} {random.choice(LAST_NAMES)}"


def _polygon_around(lat: float, lng: float) -> str:
    delta = 0.001
    ring = [[lng - delta, lat - delta], [lng + delta, lat - delta], [lng + delta, lat + delta],
            [lng - delta, lat + delta], [lng - delta, lat - delta]]
    return json.dumps({"type": "Polygon", "coordinates": [ring]})


# --- Profiles ---
print("Generating profiles...")
profiles = [{
    'id': _new_id(), 'full_name': "System Admin", 'role': "admin", 'phone_number': "+256700000000",
    'region': None, 'sub_county': None, 'uai_code': None, 'is_active': True,
    'assigned_supervisor_id': None, 'created_at': START_DATE - timedelta(days=90),
}]
supervisors = []
for region in list(REGIONS)[:NUM_SUPERVISORS]:
    supervisor = {
        'id': _new_id(), 'full_name': _person_name(), 'role': "supervisor",
        'phone_number': f"+2567{rng.integers(10_000_000, 99_999_999)}", 'region': region,
        'sub_county': REGIONS[region][0][0], 'uai_code': None, 'is_active': True,
        'assigned_supervisor_id': None, 'created_at': START_DATE - timedelta(days=60),
    }
    supervisors.append(supervisor)
    profiles.append(supervisor)

field_officers = []
for i in range(NUM_FIELD_OFFICERS):
    region = random.choice(list(REGIONS))
    supervisor = random.choice(supervisors) if rng.random() > 0.1 else None
    officer = {
        'id': _new_id(),
        'full_name': _person_name() if i else "",  # one officer with a missing name
        'role': "field_officer",
        'phone_number': f"+2567{rng.integers(10_000_000, 99_999_999)}" if rng.random() > 0.1 else None,
        'region': region if rng.random() > 0.05 else None,
        'sub_county': random.choice(REGIONS[region][0]),
        'uai_code': f"UAI-{1000 + i}" if rng.random() > 0.15 else None,
        'is_active': bool(rng.random() > INACTIVE_OFFICER_SHARE),
        'assigned_supervisor_id': supervisor['id'] if supervisor else None,
        'created_at': _random_moment(START_DATE - timedelta(days=30), START_DATE + timedelta(days=DAYS_OF_DATA // 2)),
    }
    field_officers.append(officer)
    profiles.append(officer)

profiles_df = pd.DataFrame(profiles)
profiles_df['updated_at'] = profiles_df['created_at']

# --- Officer Targets (some officers deliberately have none, some slots left empty) ---
print("Generating officer targets...")
targets = []
for officer in field_officers[OFFICERS_WITHOUT_TARGETS:]:
    row = {'id': _new_id(), 'field_officer_id': officer['id'],
           'total_farm_target': int(rng.choice([20, 25, 30, 40])), 'created_at': officer['created_at']}
    for slot in range(1, 8):
        row[f"visit_{slot}_target"] = int(rng.integers(3, 12)) if rng.random() > 0.2 else None
    targets.append(row)
targets_df = pd.DataFrame(targets)

# --- Farmers ---
print("Generating farmers...")
farmers = []
for _ in range(NUM_FARMERS):
    officer = random.choice(field_officers)
    region = officer['region'] or random.choice(list(REGIONS))
    farmers.append({
        'id': _new_id(), 'full_name': _person_name(), 'gender': random.choice(["Male", "Female"]),
        'id_type': "national_id", 'id_number': f"CM{rng.integers(10**11, 10**12 - 1)}",
        'phone_number': f"+2567{rng.integers(10_000_000, 99_999_999)}", 'region': region,
        'sub_county': random.choice(REGIONS[region][0]), 'registered_by': officer['id'],
        'created_at': _random_moment(START_DATE, END_DATE),
    })
farmers_df = pd.DataFrame(farmers)
farmers_df['updated_at'] = farmers_df['created_at']

# --- Farm Visits (recent days are denser so today's metrics are non-zero) ---
print("Generating farm visits...")
visits = []
for farmer in farmers:
    officer_id = farmer['registered_by']
    region = farmer['region']
    centre_lat, centre_lng = REGIONS[region][1]
    n_visits = max(1, int(rng.poisson(AVG_VISITS_PER_FARMER)))
    for visit_number in range(1, min(n_visits, 7) + 1):
        created_at = END_DATE - timedelta(hours=float(rng.exponential(24 * 10)))
        created_at = max(created_at, START_DATE)
        has_gps = rng.random() > 0.12
        lat = centre_lat + float(rng.normal(0, 0.15)) if has_gps else None
        lng = centre_lng + float(rng.normal(0, 0.15)) if has_gps else None
        visits.append({
            'id': _new_id(), 'farmer_id': farmer['id'], 'field_officer_id': officer_id,
            'visit_number': visit_number if rng.random() > 0.05 else None,
            'status': rng.choice(VISIT_STATUSES, p=VISIT_STATUS_WEIGHTS),
            'gps_latitude': lat, 'gps_longitude': lng,
            'polygon_boundaries': _polygon_around(lat, lng) if has_gps and rng.random() > 0.4 else None,
            'visit_notes': "Crop health assessed; advised on spacing." if rng.random() > 0.5 else None,
            'visit_date': created_at.date().isoformat(), 'created_at': created_at,
        })
visits_df = pd.DataFrame(visits)

# --- Visit Media ---
print("Generating visit media...")
media = []
for visit in visits:
    for _ in range(int(rng.integers(0, 4))):
        media_type = rng.choice(MEDIA_TYPES, p=MEDIA_TYPE_WEIGHTS)
        media.append({
            'id': _new_id(), 'visit_id': visit['id'], 'media_type': media_type,
            'media_url': f"https://storage.example.org/visit-media/{visit['id']}/{_new_id()}.{'jpg' if media_type == 'photo' else 'mp4'}",
            'gps_latitude': visit['gps_latitude'], 'gps_longitude': visit['gps_longitude'],
            'exif_data': None, 'created_at': visit['created_at'] + timedelta(minutes=int(rng.integers(0, 30))),
        })
media_df = pd.DataFrame(media)

# --- Issues & Transfer Requests ---
print("Generating issues and transfer requests...")
issues = []
for _ in range(25):
    officer = random.choice(field_officers)
    status = random.choice(ISSUE_STATUSES)
    created_at = _random_moment(START_DATE, END_DATE)
    resolved = status in ("resolved", "rejected")
    issues.append({
        'id': _new_id(), 'field_officer_id': officer['id'], 'issue_type': random.choice(ISSUE_TYPES),
        'description': "Reported from the field.", 'status': status,
        'resolved_by': random.choice(supervisors)['id'] if resolved else None,
        'resolved_at': created_at + timedelta(days=2) if resolved else None, 'created_at': created_at,
    })
issues_df = pd.DataFrame(issues)

transfers = []
for officer in random.sample(field_officers, k=4):
    status = random.choice(TRANSFER_STATUSES)
    created_at = _random_moment(START_DATE, END_DATE)
    transfers.append({
        'id': _new_id(), 'field_officer_id': officer['id'], 'preferred_region': random.choice(list(REGIONS)),
        'reason': "Family relocation", 'status': status,
        'approved_by': random.choice(supervisors)['id'] if status == "approved" else None,
        'approved_at': created_at + timedelta(days=3) if status == "approved" else None, 'created_at': created_at,
    })
transfers_df = pd.DataFrame(transfers)

# --- Save to CSV ---
output_dir = Path("data_sources")
output_dir.mkdir(parents=True, exist_ok=True)

tables = {
    'profiles.csv': profiles_df, 'officer_targets.csv': targets_df, 'farmers.csv': farmers_df,
    'farm_visits.csv': visits_df, 'visit_media.csv': media_df, 'issues.csv': issues_df,
    'transfer_requests.csv': transfers_df,
}
for file_name, df in tables.items():
    output_filepath = output_dir / file_name
    df.to_csv(output_filepath, index=False, date_format="%Y-%m-%dT%H:%M:%S.%fZ")
    print(f"{file_name}: {len(df)} rows -> {output_filepath.resolve()}")

print(f"\nDate range of generated visits: {START_DATE.strftime('%Y-%m-%d')} to {END_DATE.strftime('%Y-%m-%d')}")
print("\nVisit status distribution:")
print(visits_df['status'].value_counts())
