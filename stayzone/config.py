from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # App
    app_env: str = "development"
    log_level: str = "INFO"

    # Outlier filtering (IQR on distance-from-median)
    iqr_multiplier: float = 1.5
    iqr_min_threshold_m: float = 2000.0   # floor so tight clusters are not over-filtered
    min_inlier_fraction: float = 0.5      # roll back when fewer inliers than this survive
    small_sample_size: int = 3            # at or below this, no quartile statistics

    # Hotel zone
    zone_padding: float = 1.2
    zone_min_radius_m: float = 400.0      # walkable neighbourhood
    zone_max_radius_m: float = 5000.0     # metro area

    # Day-trip clustering
    cluster_padding: float = 1.15
    cluster_min_radius_m: float = 200.0
    max_clusters: int = 4
    points_per_cluster: int = 4
    kmeans_max_iterations: int = 20

    # Walking / rendering
    walking_speed_m_per_min: float = 80.0
    nearby_radius_m: float = 800.0
    nearby_limit: int = 4
    circle_vertices: int = 64

    class Config:
        env_file = ".env"
        case_sensitive = False


settings = Settings()
