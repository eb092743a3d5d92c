import enum
from typing import Annotated

from pydantic import Field, model_validator

from gcnv_pipeline.models import EnumField, GcnvModel
from gcnv_pipeline.models.common import RunMode

Probability = Annotated[float, Field(ge=0.0, le=1.0)]
PositiveFloat = Annotated[float, Field(gt=0.0)]


def _flag(value: bool) -> str:
    return "True" if value else "False"


class PosteriorExpectationMode(enum.StrEnum):
    """Strategy for computing copy-number posterior expectations in the denoising model."""

    MAP = "map"
    EXACT = "exact"
    HYBRID = "hybrid"


class DenoisingModel(GcnvModel):
    max_bias_factors: Annotated[int, Field(ge=0)] = 5
    """Maximum number of bias factors"""

    mapping_error_rate: Probability = 1e-2
    """Typical mapping error rate"""

    interval_psi_scale: PositiveFloat = 1e-3
    """Typical scale of interval-specific unexplained variance"""

    sample_psi_scale: PositiveFloat = 1e-4
    """Typical scale of sample-specific correction to the unexplained variance"""

    depth_correction_tau: PositiveFloat = 10000.0
    """Precision of read depth pinning to its global value"""

    log_mean_bias_standard_deviation: PositiveFloat = 0.1
    """Standard deviation of log mean bias"""

    init_ard_rel_unexplained_variance: PositiveFloat = 0.1
    """Initial value of ARD prior precisions relative to the scale of interval-specific unexplained variance"""

    num_gc_bins: Annotated[int, Field(ge=1)] = 20
    """Number of knobs on the GC curve"""

    gc_curve_standard_deviation: PositiveFloat = 1.0
    """Prior standard deviation of the GC curve from flat"""

    copy_number_posterior_expectation_mode: PosteriorExpectationMode = EnumField(
        PosteriorExpectationMode, PosteriorExpectationMode.HYBRID
    )
    """The strategy for calculating copy number posterior expectations in the coverage denoising model"""

    enable_bias_factors: bool = True
    """Enable discovery of bias factors"""

    active_class_padding_hybrid_mode: Annotated[int, Field(ge=0)] = 50000
    """Number of bases to pad active regions with in the hybrid posterior expectation mode"""

    def python_arguments(self, run_mode: RunMode) -> list[str]:
        arguments = [
            f"--psi_s_scale={self.sample_psi_scale:e}",
            f"--mapping_error_rate={self.mapping_error_rate:e}",
            f"--depth_correction_tau={self.depth_correction_tau:e}",
            f"--q_c_expectation_mode={self.copy_number_posterior_expectation_mode}",
        ]
        if run_mode == RunMode.COHORT:
            arguments += [
                f"--max_bias_factors={self.max_bias_factors:d}",
                f"--psi_t_scale={self.interval_psi_scale:e}",
                f"--log_mean_bias_std={self.log_mean_bias_standard_deviation:e}",
                f"--init_ard_rel_unexplained_variance={self.init_ard_rel_unexplained_variance:e}",
                f"--num_gc_bins={self.num_gc_bins:d}",
                f"--gc_curve_sd={self.gc_curve_standard_deviation:e}",
                f"--active_class_padding_hybrid_mode={self.active_class_padding_hybrid_mode:d}",
                f"--enable_bias_factors={_flag(self.enable_bias_factors)}",
            ]
        return arguments


class Calling(GcnvModel):
    p_alt: Probability = 1e-6
    """Total prior probability of alternative copy-number states (the reference copy-number is set to the contig integer ploidy)"""

    p_active: Probability = 1e-2
    """Prior probability of treating an interval as CNV-active (in a CNV-active domains, all copy-number states are equally likely to be called)"""

    cnv_coherence_length: PositiveFloat = 10000.0
    """Coherence length of CNV events (in the units of bp)"""

    class_coherence_length: PositiveFloat = 10000.0
    """Coherence length of CNV-silent and CNV-active domains (in the units of bp)"""

    max_copy_number: Annotated[int, Field(ge=0)] = 5
    """Highest allowed copy-number state"""

    def python_arguments(self, run_mode: RunMode) -> list[str]:
        arguments = [
            f"--p_alt={self.p_alt:e}",
            f"--cnv_coherence_length={self.cnv_coherence_length:e}",
            f"--max_copy_number={self.max_copy_number:d}",
        ]
        if run_mode == RunMode.COHORT:
            arguments += [
                f"--p_active={self.p_active:f}",
                f"--class_coherence_length={self.class_coherence_length:f}",
            ]
        return arguments


class HybridAdvi(GcnvModel):
    learning_rate: PositiveFloat = 1e-2
    """Adamax optimizer learning rate"""

    adamax_beta_1: Annotated[float, Field(ge=0.0, lt=1.0)] = 0.9
    """Adamax optimizer first moment estimation forgetting factor"""

    adamax_beta_2: Annotated[float, Field(ge=0.0, lt=1.0)] = 0.99
    """Adamax optimizer second moment estimation forgetting factor"""

    log_emission_samples_per_round: Annotated[int, Field(ge=1)] = 50
    """Log emission samples drawn per round of sampling"""

    log_emission_sampling_median_rel_error: PositiveFloat = 5e-3
    """Maximum tolerated median relative error in log emission sampling"""

    log_emission_sampling_rounds: Annotated[int, Field(ge=1)] = 10
    """Log emission maximum sampling rounds"""

    max_advi_iter_first_epoch: Annotated[int, Field(ge=1)] = 5000
    """Maximum ADVI iterations in the first epoch"""

    max_advi_iter_subsequent_epochs: Annotated[int, Field(ge=1)] = 200
    """Maximum ADVI iterations in subsequent epochs"""

    min_training_epochs: Annotated[int, Field(ge=1)] = 10
    """Minimum number of training epochs"""

    max_training_epochs: Annotated[int, Field(ge=1)] = 50
    """Maximum number of training epochs"""

    initial_temperature: Annotated[float, Field(ge=1.0)] = 2.0
    """Initial temperature (for DA-ADVI)"""

    num_thermal_advi_iters: Annotated[int, Field(ge=0)] = 2500
    """Number of thermal ADVI iterations (for DA-ADVI)"""

    convergence_snr_averaging_window: Annotated[int, Field(ge=1)] = 500
    """Averaging window for calculating training signal-to-noise ratio (SNR) for convergence checking"""

    convergence_snr_trigger_threshold: PositiveFloat = 0.1
    """The SNR threshold to be reached before triggering the convergence countdown"""

    convergence_snr_countdown_window: Annotated[int, Field(ge=1)] = 10
    """The number of ADVI iterations during which the SNR is required to stay below the set threshold for convergence"""

    max_calling_iters: Annotated[int, Field(ge=1)] = 10
    """Maximum number of internal self-consistency iterations within each calling step"""

    caller_update_convergence_threshold: PositiveFloat = 1e-3
    """Maximum tolerated calling update size for convergence"""

    caller_internal_admixing_rate: Annotated[float, Field(gt=0.0, le=1.0)] = 0.75
    """Admixing ratio of new and old called posteriors (between 0 and 1; larger values implies using more of the new posterior and less of the old posterior) for internal convergence loops"""

    caller_external_admixing_rate: Annotated[float, Field(gt=0.0, le=1.0)] = 1.0
    """Admixing ratio of new and old called posteriors (between 0 and 1; larger values implies using more of the new posterior and less of the old posterior) after convergence"""

    disable_annealing: bool = False
    """If true, pass through the annealing stage without thermal ADVI iterations"""

    @model_validator(mode="after")
    def ensure_epoch_limits(self):
        if self.max_training_epochs < self.min_training_epochs:
            raise ValueError("max_training_epochs must not be smaller than min_training_epochs")
        return self

    def python_arguments(self) -> list[str]:
        return [
            f"--learning_rate={self.learning_rate:e}",
            f"--adamax_beta1={self.adamax_beta_1:e}",
            f"--adamax_beta2={self.adamax_beta_2:e}",
            f"--log_emission_samples_per_round={self.log_emission_samples_per_round:d}",
            f"--log_emission_sampling_rounds={self.log_emission_sampling_rounds:d}",
            f"--log_emission_sampling_median_rel_error={self.log_emission_sampling_median_rel_error:e}",
            f"--max_advi_iter_first_epoch={self.max_advi_iter_first_epoch:d}",
            f"--max_advi_iter_subsequent_epochs={self.max_advi_iter_subsequent_epochs:d}",
            f"--min_training_epochs={self.min_training_epochs:d}",
            f"--max_training_epochs={self.max_training_epochs:d}",
            f"--initial_temperature={self.initial_temperature:e}",
            f"--num_thermal_advi_iters={self.num_thermal_advi_iters:d}",
            f"--convergence_snr_averaging_window={self.convergence_snr_averaging_window:d}",
            f"--convergence_snr_trigger_threshold={self.convergence_snr_trigger_threshold:e}",
            f"--convergence_snr_countdown_window={self.convergence_snr_countdown_window:d}",
            f"--max_calling_iters={self.max_calling_iters:d}",
            f"--caller_update_convergence_threshold={self.caller_update_convergence_threshold:e}",
            f"--caller_internal_admixing_rate={self.caller_internal_admixing_rate:e}",
            f"--caller_external_admixing_rate={self.caller_external_admixing_rate:e}",
            f"--disable_annealing={_flag(self.disable_annealing)}",
        ]


class EngineConfig(GcnvModel):
    """
    Settings for the external inference engine (the ``gcnvkernel`` denoising and calling
    scripts) and its hyperparameters.
    """

    python_executable: str = "python"
    """Python interpreter with ``gcnvkernel`` installed"""

    script_dir: str | None = None
    """Directory with the engine scripts; looked up on ``PATH`` if not set"""

    num_threads: Annotated[int, Field(ge=1)] | None = None
    """Number of threads for the numerical libraries of the engine"""

    denoising: DenoisingModel = DenoisingModel()
    """Coverage denoising model hyperparameters"""

    calling: Calling = Calling()
    """Copy-number calling hyperparameters"""

    advi: HybridAdvi = HybridAdvi()
    """Hybrid ADVI inference settings"""

    def python_arguments(self, run_mode: RunMode) -> list[str]:
        """Hyperparameter arguments for the engine script of ``run_mode``"""
        return (
            self.denoising.python_arguments(run_mode)
            + self.calling.python_arguments(run_mode)
            + self.advi.python_arguments()
        )
