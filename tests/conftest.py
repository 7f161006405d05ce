import pandas as pd
import pytest


@pytest.fixture
def hospital_df():
    """
    Small encounter table, string-valued like a freshly read CSV.
    Circulatory leads, Missing is frequent enough to take a top slot,
    and two records have no age group.
    """
    rows = [
        ("Circulatory", "[70-80)"),
        ("Other", "[70-80)"),
        ("Circulatory", "[50-60)"),
        ("Missing", "[60-70)"),
        ("Respiratory", "[40-50)"),
        ("Circulatory", "[70-80)"),
        ("Missing", "[70-80)"),
        ("Other", ""),
        ("Diabetes", "[60-70)"),
        ("Circulatory", ""),
        ("Respiratory", "[70-80)"),
        ("Injury", "[60-70)"),
        ("Digestive", "[80-90)"),
        ("Musculoskeletal", "[50-60)"),
        ("Neoplasms", "[60-70)"),
        ("Other", "[50-60)"),
    ]
    return pd.DataFrame(rows, columns=["diag_1", "age"])


@pytest.fixture
def specialty_df():
    return pd.DataFrame(
        {
            "medical_specialty": ["Surgery", "Cardiology", "Other", "InternalMedicine"],
            "readmission_rate": ["0.10", "0.20", "0.15", "0.20"],
            "count": ["50", "100", "30", "20"],
        }
    )


@pytest.fixture
def data_dir(tmp_path, hospital_df, specialty_df):
    """Folder holding both CSV files written from the fixtures above."""
    hospital_df.to_csv(tmp_path / "hospital_readmissions.csv", index=False)
    specialty_df.to_csv(tmp_path / "specialty_readmission.csv", index=False)
    return tmp_path
