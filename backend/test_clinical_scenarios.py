import unittest
from app import generate_tpn_plan
from constants import MIX_CONSTANTS
from dosing import DosingEngine
from mixture import MixtureSolver
from models import PatientInputs


class TestClinicalScenarios(unittest.TestCase):
    """
    End-to-end bedside cases through the full pipeline.
    Run with: python -m unittest test_clinical_scenarios.py
    """

    def create_base_patient(self, weight=1.5, gir=8):
        # Helper: preterm on full PN with the default ward prescription
        return {
            'weight': weight,
            'tfi': 150,
            'feeds': 0,
            'meds': 0,
            'amino_acids': 3.5,
            'lipids': 3,
            'sodium': 3,
            'potassium': 2,
            'calcium': 2,
            'gir': gir,
        }

    def test_01_scenario_a_full_pn(self):
        """[PIPELINE] 1.5kg, TFI 150, GIR 8 with every stock on the shelf."""
        print("\nTEST 1: Scenario A")
        result = generate_tpn_plan(self.create_base_patient())
        plan, mix = result.plan, result.mix

        self.assertAlmostEqual(plan.total_fluid_intake, 225.0)
        self.assertAlmostEqual(plan.aa_volume, 52.5)
        self.assertAlmostEqual(plan.lipid_volume, 22.5)
        self.assertAlmostEqual(plan.dextrose_electrolyte_volume, 150.0)
        self.assertAlmostEqual(plan.total_dextrose_grams_per_day, 17.28)

        self.assertTrue(mix.success, mix.error)
        print(f"  > Target: {mix.target_concentration * 100:.2f}% | Parts: {mix.parts}")
        self.assertEqual([p.name for p in mix.parts], ["D25W", "D10W"])

        electrolytes = mix.na_volume + mix.k_volume + mix.ca_volume
        self.assertAlmostEqual(mix.dextrose_volume, 60.0 - electrolytes, places=6)
        self.assertAlmostEqual(mix.na_volume, 1.8 / 0.513)
        self.assertAlmostEqual(mix.k_volume, 0.6)
        self.assertAlmostEqual(mix.ca_volume, 1.2)

        # Mass balance inside the syringe
        c_h, c_l = 0.25, 0.10
        v_h, v_l = mix.parts[0].volume, mix.parts[1].volume
        self.assertAlmostEqual(v_h * c_h + v_l * c_l, mix.target_grams, places=6)
        self.assertAlmostEqual(v_h + v_l, mix.available_volume_for_dextrose, places=6)

        # Syringe grams scaled back to 24h reproduce the GIR target
        daily = mix.delivered_grams / MIX_CONSTANTS.FIXED_VOLUME_ML * plan.dextrose_electrolyte_volume
        self.assertAlmostEqual(daily, plan.total_dextrose_grams_per_day, places=6)

    def test_02_scenario_b_d5w_only(self):
        """[LIMITS] D5W alone cannot carry GIR 8 in this volume."""
        print("\nTEST 2: Scenario B")
        result = generate_tpn_plan(self.create_base_patient(), enabled_solutions={"D5W"})
        mix = result.mix

        self.assertFalse(mix.success)
        self.assertEqual(mix.error_code, "concentration_unreachable")
        self.assertIn("D5W", mix.error)
        self.assertIn("Calculation Error", result.human_readable_summary)

    def test_03_scenario_c_no_room(self):
        """[FLUIDS] Feeds + meds + AA + lipids consume the whole TFI."""
        print("\nTEST 3: Scenario C")
        data = self.create_base_patient()
        data.update({'tfi': 60, 'feeds': 40, 'meds': 20})
        result = generate_tpn_plan(data)

        self.assertAlmostEqual(result.plan.parenteral_fluid_volume, 30.0)
        self.assertGreater(result.plan.aa_volume + result.plan.lipid_volume, 30.0)
        self.assertEqual(result.plan.dextrose_electrolyte_volume, 0.0)
        self.assertEqual(result.mix.error_code, "no_volume_available")

    def test_04_scenario_d_electrolyte_overflow(self):
        """[ELECTROLYTES] Extreme sodium in a small dextrose volume."""
        print("\nTEST 4: Scenario D")
        data = {'weight': 2, 'tfi': 60, 'amino_acids': 3.5, 'lipids': 1,
                'sodium': 10, 'potassium': 2, 'calcium': 2, 'gir': 6}
        result = generate_tpn_plan(data)
        self.assertAlmostEqual(result.plan.dextrose_electrolyte_volume, 40.0)

        factor = 60.0 / 40.0
        expected = (2 * 10 * factor / 0.513) + (2 * 2 * factor / 2.0) + (2 * 2 * factor)
        print(f"  > Electrolytes: {expected:.2f} ml")
        self.assertGreaterEqual(expected, 60.0)
        self.assertEqual(result.mix.error_code, "electrolyte_overflow")
        self.assertIn(f"({expected:.2f} ml)", result.mix.error)

    def test_05_gir_monotonicity(self):
        """[DEXTROSE] Raising GIR never lowers the target and eventually exhausts D50W."""
        print("\nTEST 5: GIR Monotonicity")
        previous_grams = -1.0
        previous_target = -1.0
        codes = []
        for gir in range(2, 42, 2):
            result = generate_tpn_plan(self.create_base_patient(gir=gir))
            self.assertGreater(result.plan.total_dextrose_grams_per_day, previous_grams)
            previous_grams = result.plan.total_dextrose_grams_per_day
            if result.mix.success:
                self.assertGreaterEqual(result.mix.target_concentration, previous_target)
                previous_target = result.mix.target_concentration
            codes.append(result.mix.error_code)

        self.assertIsNone(codes[3])  # GIR 8
        self.assertEqual(codes[-1], "concentration_unreachable")  # GIR 40

    def test_06_electrolytes_below_limit_on_success(self):
        for gir in (4, 8, 12):
            for sodium in (0, 3, 6):
                data = self.create_base_patient(gir=gir)
                data['sodium'] = sodium
                mix = generate_tpn_plan(data).mix
                if mix.success:
                    self.assertLess(mix.na_volume + mix.k_volume + mix.ca_volume, 60.0)

    def test_07_idempotence(self):
        """[PURITY] Same snapshot, same answer."""
        inputs = PatientInputs(**self.create_base_patient())
        runs = []
        for _ in range(2):
            plan = DosingEngine.compute_dosing_plan(inputs)
            mix = MixtureSolver.solve_mix(
                plan.dextrose_electrolyte_volume, plan.total_dextrose_grams_per_day,
                inputs.weight, inputs.sodium, inputs.potassium, inputs.calcium,
                ["D50W", "D25W", "D10W", "D5W", "Sterile Water"]
            )
            runs.append((plan, mix))
        self.assertEqual(runs[0], runs[1])

    def test_08_zero_weight(self):
        """[INPUT] Blank weight suppresses the whole plan without an error."""
        result = generate_tpn_plan(self.create_base_patient(weight=0))
        self.assertIsNone(result.plan)
        self.assertIsNone(result.mix)


if __name__ == '__main__':
    unittest.main()
